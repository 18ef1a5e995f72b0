"""
Resume Refinery

Multi-agent pipelines that tailor resume content (job titles, summaries,
experience entries, skill ordering, cover letters) to a target job description.
Each task runs analyst, writer and reviewer agents in sequence and settles the
result through a bounded critique loop.
"""

__version__ = "0.1.0"
