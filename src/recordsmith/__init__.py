"""RecordSmith - Import CSV files into record collections."""

__version__ = "0.1.0"
