"""
Taskboard - task/project manager client with drag-and-drop ordering.
"""

__version__ = "0.1.0"
