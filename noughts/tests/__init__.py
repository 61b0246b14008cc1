"""Tests for Noughts."""
