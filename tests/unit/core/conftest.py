"""Shared fixtures for core unit tests"""

import pytest

from mdplate.core.parse import make_parser


SAMPLE_MD = """\
# Heading 1

A paragraph with **bold** text.

## Heading 2

- [x] item one
- item two

```python
print("hello")
```

---

See [the docs][docs] for more.

[docs]: https://example.com/docs
"""


@pytest.fixture(name="parser")
def parser_fixture():
    return make_parser("gfm-like")


@pytest.fixture(name="sample_tokens")
def sample_tokens_fixture(parser):
    return parser.parse(SAMPLE_MD, {})


@pytest.fixture(name="sample_md")
def sample_md_fixture():
    return SAMPLE_MD
