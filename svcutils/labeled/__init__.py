"""Counters, gauges and stopwatches labeled with values taken from a context mapping."""