"""
estagios - terminal client for the internship records API.

Search, sort, grade, export and print student internship records.
"""
