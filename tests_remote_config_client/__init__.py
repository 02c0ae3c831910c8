"""Tests for remote_config_client."""
