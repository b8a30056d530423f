"""
FocusFlow core: data models, the data service and authentication
"""
