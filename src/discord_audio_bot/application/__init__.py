"""
Application Layer

Orchestrates domain models and infrastructure ports:
- interfaces/: ports implemented by infrastructure adapters
- services/: command serializer, playback sessions, session registry, command service
"""
