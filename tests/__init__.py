"""Test suite for the registration portal"""
