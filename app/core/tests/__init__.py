"""Tests for core infrastructure: errors, helpers, mixins and health check."""
