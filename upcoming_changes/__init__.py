"""
upcoming-changes: breaking-change documentation for cmdlet modules.

Reads the build artifacts of cmdlet modules (manifests, compiled components and
script components), collects the upcoming breaking-change markers declared on
commands and parameters, and renders them as a Markdown change log or as a
structured JSON/YAML report.

Main features:
- Marker discovery in .NET assemblies without loading them
- Marker discovery in script modules and their dot-sourced files
- Per parameter-set aggregation of command and parameter messages
- Markdown report for all modules, structured report for one module
"""

__version__ = "0.1.0"
