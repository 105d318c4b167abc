"""
Remote task collection backends.

- memory.py: in-process collection (tests, demos) and its JSON-file variant
- firebase.py: Firebase Realtime Database over REST + event stream
- snapshot.py: decoding and ordering of raw collection values
- connectivity.py: the "is the network reachable" gate
"""
