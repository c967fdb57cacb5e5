"""Stock administration screen: list, paginate, create, edit, delete and export stock records."""

__version__ = "0.1.0"
