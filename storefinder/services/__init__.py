"""Business logic services.

Repositories own data access and are constructed with an injected session
factory. Collaborators (passwords, mail, photos, web session) are plain
objects/functions called by repositories and routes.
"""
