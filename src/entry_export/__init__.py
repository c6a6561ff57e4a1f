"""
entry_export – resumable, multi-step export of form entries.

Import path convention::

    from entry_export.application.export import ExportJob, RowFormatter
    from entry_export.kernel.errors import UnknownRequestError
    from entry_export.adapters.fastapi import create_app
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
