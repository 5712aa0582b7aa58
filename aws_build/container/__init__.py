"""Container runtime module.

This module handles:
- External command execution (command)
- Runtime selection and command composition (launcher)
- Build image creation (image)
- The build container run (runner)
- Ownership reconciliation for rootless runtimes (permissions)
"""
