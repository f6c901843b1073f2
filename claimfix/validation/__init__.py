"""Cross-document consistency checks for the documents of one claim."""
