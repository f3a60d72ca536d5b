"""
Service Organization
====================

**application/**
  Singletons owned by ServiceContainer: GardenController, NotificationCenter,
  the session gates.

**ai/**
  Care advice over a pluggable LLM backend.

**utilities/**
  Stateless helpers such as EmailService and PlantNotifier.
"""
