"""Test package for lan-chat-hub."""
