"""
Route groups mounted by main.py
"""
