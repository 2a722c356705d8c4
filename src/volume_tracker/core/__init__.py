"""Pure volume accounting, statistics, suggestion and allocation engine."""
