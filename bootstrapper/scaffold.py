"""
scaffold.py

Responsibility: Write the starter source files for the selected stack.

Starters are Jinja2 templates rendered with the project name and description.
Existing files are overwritten so a template that already ships a starter
gets the stack's version.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from jinja2 import Environment, StrictUndefined

from bootstrapper.logging_config import get_logger, log_success
from bootstrapper.validation import Stack

logger = get_logger(__name__)

FASTAPI_MAIN = '''\
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

app = FastAPI(
    title="{{ project_name }} API",
    description={{ description | tojson }},
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.get("/")
async def root():
    return {"message": "Hello from FastAPI!"}

@app.get("/health")
async def health():
    return {"status": "healthy"}

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
'''

NODE_INDEX = """\
import express from 'express';
import cors from 'cors';
import helmet from 'helmet';
import compression from 'compression';
import morgan from 'morgan';
import dotenv from 'dotenv';

dotenv.config();

const app = express();
const PORT = process.env.APP_PORT || 3000;

// Middleware
app.use(helmet());
app.use(compression());
app.use(morgan('combined'));
app.use(cors());
app.use(express.json());
app.use(express.urlencoded({ extended: true }));

// Routes
app.get('/', (req, res) => {
  res.json({ message: 'Hello from {{ project_name }}!' });
});

app.get('/health', (req, res) => {
  res.json({ status: 'healthy' });
});

app.listen(PORT, () => {
  console.log(`Server running on port ${PORT}`);
});
"""

REACT_APP = """\
import React from 'react';
import './App.css';

function App() {
  return (
    <div className="App">
      <header className="App-header">
        <h1>Welcome to {{ project_name }}</h1>
        <p>{ {{ description | tojson }} }</p>
      </header>
    </div>
  );
}

export default App;
"""


@dataclass(frozen=True)
class Starter:
    path: str
    template: str
    package_dirs: tuple[str, ...] = ()
    plain_dirs: tuple[str, ...] = ()


FASTAPI = Starter(
    path="backend/python/app/main.py",
    template=FASTAPI_MAIN,
    package_dirs=tuple(f"backend/python/{d}" for d in ("app", "models", "routes", "services", "utils")),
)
NODEJS = Starter(
    path="src/index.ts",
    template=NODE_INDEX,
    plain_dirs=tuple(f"src/{d}" for d in ("controllers", "middleware", "models", "routes", "services", "utils", "config")),
)
REACT = Starter(
    path="frontend/src/App.tsx",
    template=REACT_APP,
    plain_dirs=("frontend/public",) + tuple(f"frontend/src/{d}" for d in ("components", "pages", "hooks", "utils", "services")),
)

STARTERS: dict[Stack, tuple[Starter, ...]] = {
    Stack.FASTAPI: (FASTAPI,),
    Stack.NODEJS: (NODEJS,),
    Stack.REACT: (REACT,),
    Stack.FULLSTACK: (NODEJS, REACT),
}


def _env() -> Environment:
    return Environment(autoescape=False, undefined=StrictUndefined, keep_trailing_newline=True)


def scaffold_stack(project_dir: Path, stack: Stack, *, project_name: str, description: str) -> list[str]:
    """Write the stack's starter files; returns their project-relative paths."""
    logger.info("Creating initial application files...", stack=stack.value)
    env = _env()
    written: list[str] = []
    for starter in STARTERS[stack]:
        for d in starter.package_dirs:
            pkg = project_dir / d
            pkg.mkdir(parents=True, exist_ok=True)
            (pkg / "__init__.py").touch()
        for d in starter.plain_dirs:
            (project_dir / d).mkdir(parents=True, exist_ok=True)

        out = env.from_string(starter.template).render(project_name=project_name, description=description)
        dst = project_dir / starter.path
        dst.parent.mkdir(parents=True, exist_ok=True)
        dst.write_text(out, encoding="utf-8", newline="\n")
        written.append(starter.path)
        log_success(logger, "Starter file created", file=starter.path)
    return written
