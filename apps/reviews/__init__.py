"""Guest reviews of completed stays and host replies."""
