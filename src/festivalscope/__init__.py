"""festivalscope: paginated festival catalog browsing with lazily resolved details."""

__version__ = "0.1.0"
