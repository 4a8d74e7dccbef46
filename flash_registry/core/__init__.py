"""Core configuration, records and shared dependencies"""
