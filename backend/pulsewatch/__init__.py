"""PulseWatch uptime monitoring backend."""
