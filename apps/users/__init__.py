"""Users app package.

Defines the custom user model (email login, profile attributes) and the
authentication flows. Use ``apps.users.models.CustomUser`` as the
AUTH_USER_MODEL throughout the project.
"""
