"""Job Satisfaction Insights engine."""
