"""Feature modules for neo-uploads."""
