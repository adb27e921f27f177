"""
Build GTFS feeds for Comboios de Portugal from a schedule data provider.
"""
