"""
Infrastructure Layer
=====================

Low-level technical concerns:
- Logging setup
- Timezone normalization
"""
