"""
Models module - internal data transfer objects.

These never leave the process as-is: they carry data between the external
provider clients and the services.
- providers: video rooms, recordings, interview analysis results
"""
