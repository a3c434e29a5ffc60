"""
LivePen Kernel -- Starter Content

First-run buffers and the placeholder text seeded into new buffers.
"""

from __future__ import annotations

from livepen.kernel.types import BufferKind

STARTER_HTML = """<h1>Hello, Coder!</h1>
<p>This is your live code editor.</p>
<button id="myButton">Click Me</button>
"""

STARTER_CSS = """body {
  font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Oxygen, Ubuntu, Cantarell, 'Open Sans', 'Helvetica Neue', sans-serif;
  background-color: #f0f4f8;
  color: #1e293b;
  display: flex;
  flex-direction: column;
  justify-content: center;
  align-items: center;
  height: 100vh;
  margin: 0;
  text-align: center;
}

button {
  padding: 12px 24px;
  border: none;
  border-radius: 8px;
  font-size: 16px;
  background-color: #3b82f6;
  color: white;
  cursor: pointer;
  transition: transform 0.2s, background-color 0.3s;
}

button:hover {
  background-color: #2563eb;
  transform: translateY(-2px);
}
"""

STARTER_JS = """const button = document.getElementById('myButton');
const heading = document.querySelector('h1');

const greetings = ['Hello!', '¡Hola!', 'Bonjour!', 'Hallo!', 'Ciao!'];
let currentIndex = 0;

button.addEventListener('click', () => {
  currentIndex = (currentIndex + 1) % greetings.length;
  heading.textContent = greetings[currentIndex];

  const randomColor = '#' + Math.floor(Math.random()*16777215).toString(16).padStart(6, '0');
  document.body.style.backgroundColor = randomColor;
});
"""

# (display name, kind, content) in bootstrap order
STARTER_BUFFERS: tuple[tuple[str, BufferKind, str], ...] = (
    ("index.html", BufferKind.MARKUP, STARTER_HTML),
    ("style.css", BufferKind.STYLE, STARTER_CSS),
    ("script.js", BufferKind.SCRIPT, STARTER_JS),
)


def placeholder_content(name: str, kind: BufferKind) -> str:
    """Content seeded into a freshly created buffer."""
    return f"/* New {kind.value} file: {name} */\n"
