"""
Core of the Sheetlog server: grid interfaces, schema and row codec,
permission engine and the method dispatcher.
"""
