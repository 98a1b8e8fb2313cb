"""
Conversation subsystem.

Components:
- models.py: Conversation, Message, the pair-derived conversation id
- store.py: send / mark-read / unread counting over the shared chat collection
"""
