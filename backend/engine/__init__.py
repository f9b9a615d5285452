"""
Per-map orchestration: viewport state in, reconciled marker handles out.
"""
