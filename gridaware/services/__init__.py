# services/__init__.py
# Stateful collaborators: intensity cache and settings persistence
