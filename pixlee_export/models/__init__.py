"""Pydantic models of the export cartridge"""
