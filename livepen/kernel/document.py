"""
LivePen Kernel -- Document Assembly

Pure function: CompositeDocument -> HTML string.
No IO. Deterministic: same input, same output.

Output structure:
  <!DOCTYPE html>
  <html>
  <head>
    <meta charset="utf-8">
    <script>{fault harness}</script>
    <style>{settled style}</style>
  </head>
  <body>
    {settled markup}
    <script>
      try { {settled script} } catch (error) { reportFault(error); }
    </script>
  </body>
  </html>

Style, markup and script are embedded verbatim: no escaping, no rewriting.
The harness sits in its own script element ahead of the user's code, so the
global listener is installed even when the user script fails to parse.
"""

from __future__ import annotations

import chevron

from livepen.kernel.types import CompositeDocument

OVERLAY_ELEMENT_ID = "runtime-error-display"
FAULT_PREFIX = "JavaScript Error: "
DEFAULT_TITLE = "Preview"

# Installed once per execution context. Both fault paths (the try/catch
# around the user script and the global listeners) end in reportFault,
# which owns a single overlay element and overwrites its text.
FAULT_HARNESS_JS = """
(function () {
  var OVERLAY_ID = '%(overlay_id)s';
  var PREFIX = '%(prefix)s';

  function describe(error) {
    if (error !== null && typeof error === 'object' && 'message' in error) {
      return String(error.message);
    }
    return String(error);
  }

  function overlay() {
    var el = document.getElementById(OVERLAY_ID);
    if (el) {
      return el;
    }
    var body = document.body;
    if (!body) {
      return null;
    }
    el = document.createElement('div');
    el.id = OVERLAY_ID;
    el.style.position = 'fixed';
    el.style.bottom = '10px';
    el.style.left = '10px';
    el.style.padding = '12px';
    el.style.backgroundColor = 'rgba(239, 68, 68, 0.9)';
    el.style.color = 'white';
    el.style.fontFamily = 'monospace';
    el.style.fontSize = '14px';
    el.style.borderRadius = '8px';
    el.style.zIndex = '9999';
    body.appendChild(el);
    return el;
  }

  window.reportFault = function (error) {
    try {
      console.error(error);
      var el = overlay();
      if (el) {
        el.textContent = PREFIX + describe(error);
      }
    } catch (ignored) {
      // the overlay itself must never raise out of the boundary
    }
  };

  window.addEventListener('error', function (event) {
    var error = event.error;
    if (error === undefined || error === null) {
      error = event.message;
    }
    window.reportFault(error);
    event.preventDefault();
  });

  window.addEventListener('unhandledrejection', function (event) {
    window.reportFault(event.reason);
    event.preventDefault();
  });
})();
""" % {"overlay_id": OVERLAY_ELEMENT_ID, "prefix": FAULT_PREFIX}

DOCUMENT_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{{title}}</title>
<script>{{{harness}}}</script>
<style>{{{style}}}</style>
</head>
<body>
{{{markup}}}
<script>
try {
{{{script}}}
} catch (error) {
  reportFault(error);
}
</script>
</body>
</html>
"""


def assemble_document(composite: CompositeDocument, title: str = DEFAULT_TITLE) -> str:
    """Build the single executable document for a settled triple."""
    return chevron.render(
        DOCUMENT_TEMPLATE,
        {
            "title": title,
            "harness": FAULT_HARNESS_JS,
            "style": composite.style,
            "markup": composite.markup,
            "script": composite.script,
        },
    )
