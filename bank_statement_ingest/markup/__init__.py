"""
Markup sub-package for bank-statement-ingest.

Contains the two dialect front ends that turn OFX/QFX text into the same
intermediate tree of ``RawNode`` objects:

- node.py: the ``RawNode`` tree type shared by both front ends.
- sgml_tokenizer.py: OFX 1.x tag soup (unclosed tags, header block).
- xml_tree.py: OFX 2.x / QFX strict XML.

Downstream code (the QFX extractor) only ever sees ``RawNode`` trees, so
it does not need to know which dialect a document was written in.
"""
