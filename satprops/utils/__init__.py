"""Utility functions for satprops"""
