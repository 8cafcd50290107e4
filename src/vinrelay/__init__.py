"""VIN Relay — validates VIN form submissions and relays them by email."""
