# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Rendering and writing of generated code.

- TemplateProvider / TypeScriptTemplateProvider: text for one named template
- CodeWriter / FileSystemCodeWriter: persistence of rendered files
- TypeScriptGenerator: one file per generated type
"""

__all__ = []
