"""Test suite for resume-export."""
