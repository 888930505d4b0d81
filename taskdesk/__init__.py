"""
taskdesk - task management with a natural-language agent layer
"""

__version__ = "0.1.0"
