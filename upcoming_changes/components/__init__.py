"""
Readers for the build artifacts of a module.

Modules:
- manifest: module manifest (.psd1)
- powershell: PowerShell lexical helpers and literal parsing
- script: script components (.psm1 and dot-sourced .ps1 files)
- metadata: .NET metadata blob decoding
- binary: compiled components (.NET assemblies)
"""
