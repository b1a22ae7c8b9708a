# features/__init__.py
# Core domain logic: classification, provider, resolver and content transformers
