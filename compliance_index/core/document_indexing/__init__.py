"""
Document indexing pipeline.

Turns a parsed source document into tenant-scoped, embedded search chunks:
access guard -> source resolver -> content router -> chunker -> cap guard
-> embedding -> index writer. Orchestrated by entrypoint.IndexingPipeline.
"""
