"""Text processing stages: preprocessing, entity extraction, dedup, ad detection."""
