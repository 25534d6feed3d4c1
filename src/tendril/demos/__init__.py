"""Demo applications. Opt-in: require textual and requests.

- ``dog_app``: browse dog breeds; the picture resource restarts when the
  selected breed changes.
- ``all_events``: log every mouse, key, focus and scroll event on a widget
  into a bounded log.
"""
