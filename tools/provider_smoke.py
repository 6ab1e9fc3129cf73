# tools/provider_smoke.py
from __future__ import annotations
import asyncio
from openai import NotFoundError
from call_core.provider_cfg import client, settings

async def _ping() -> None:
    s = settings()
    print("Provider :", s.label)
    print("Base URL :", s.base_url)
    print("Models   :", s.transcribe_model, "/", s.analysis_model)
    cli = client(s)
    try:
        models = await cli.models.list()
        ids = {m.id for m in models.data}
        for name in (s.transcribe_model, s.analysis_model):
            print(f"  {name}: {'available' if name in ids else 'NOT LISTED'}")
        r = await cli.chat.completions.create(
            model=s.analysis_model,
            messages=[{"role": "user", "content": "Say 'pong' only."}],
            temperature=0.0,
            max_tokens=5,
        )
        print("Reply    :", r.choices[0].message.content)
    except NotFoundError:
        print("ERROR 404: the provider does not know this model or base URL.")
        print("→ Check ANALYSIS_MODEL and GROQ_BASE_URL.")
        raise
    finally:
        await cli.close()

def main():
    asyncio.run(_ping())

if __name__ == "__main__":
    main()
