"""Tests for Tuya Free Cooling integration."""
