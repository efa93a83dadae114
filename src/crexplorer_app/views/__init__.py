"""
Views for the crexplorer app.
"""
