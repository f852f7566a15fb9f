"""Quick check that Ollama is running and the embedding and generation models are pulled."""

import sys

import httpx

from resume_search.config import get_embedding_model, get_llm_model, get_ollama_url


def main() -> None:
    """Check Ollama connectivity and model availability."""
    url = get_ollama_url()
    wanted = [get_embedding_model(), get_llm_model()]
    print(f"Checking Ollama at {url} for {', '.join(wanted)}...")

    try:
        resp = httpx.get(f"{url}/api/tags", timeout=5.0)
        resp.raise_for_status()
        models = [m["name"] for m in resp.json().get("models", [])]
        print(f"Available models: {', '.join(models) or '(none)'}")
    except httpx.ConnectError:
        print("  Ollama is not running. Start it with: ollama serve")
        sys.exit(1)
    except Exception as e:
        print(f"  Error: {e}")
        sys.exit(1)

    missing = [w for w in wanted if not any(w in m for m in models)]
    for model in wanted:
        if model in missing:
            print(f"  {model} not found, run: ollama pull {model}")
        else:
            print(f"  {model} is available")
    if missing:
        sys.exit(1)


if __name__ == "__main__":
    main()
