"""Core domain logic: exceptions and the document indexing pipeline."""
