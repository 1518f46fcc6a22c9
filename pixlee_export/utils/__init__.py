"""Helpers shared by services and models"""
