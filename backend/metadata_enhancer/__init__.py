"""
Metadata Enhancer backend.

Connects to Google Drive, generates AI metadata for files and writes it
back to Drive as custom file properties.
"""
