"""Dynamic content viewer: renders and edits one structured content item per module."""
