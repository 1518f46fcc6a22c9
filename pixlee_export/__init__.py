"""Pixlee catalog export cartridge"""
