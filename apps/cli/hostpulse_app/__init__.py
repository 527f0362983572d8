"""HostPulse command-line application."""
