"""
Dissertation Proposal Examiner
Multi-agent Gemini critique of dissertation proposals with an examiner chat
"""

__version__ = "1.0.0"
