"""
coursetable: fetch a student's weekly course tables and aggregate them per semester.
"""
