# console.py - run with: streamlit run token_mint_api/console.py
import json
import os

import streamlit as st
from dotenv import load_dotenv

from token_mint_api.client import (
    DEFAULT_API_URL,
    PRESETS,
    TokenApiClient,
    format_mint_address,
    is_valid_metadata_url,
)

load_dotenv()

TOKEN_API_URL = os.getenv("TOKEN_API_URL", DEFAULT_API_URL)

st.set_page_config(page_title="Solana Token Console", layout="wide")
st.title("Solana Token Console")

try:
    WAIT_SECONDS = float(os.getenv("REVOKE_WAIT_SECONDS", "3"))
except ValueError:
    st.warning(f"REVOKE_WAIT_SECONDS must be a number, got {os.getenv('REVOKE_WAIT_SECONDS')!r}; using 3 seconds.")
    WAIT_SECONDS = 3.0

api_url = st.sidebar.text_input("API URL", value=TOKEN_API_URL)
client = TokenApiClient(api_url)

if client.check_health():
    st.sidebar.success("API is healthy")
else:
    st.sidebar.error(f"API not reachable at {api_url}")


def show_result(result: dict):
    if result.get("success"):
        st.success("Done")
        if result.get("mintAddress"):
            st.markdown(f"**Mint:** `{result['mintAddress']}`")
        if result.get("explorerUrl"):
            st.markdown(f"[View on Solana Explorer]({result['explorerUrl']})")
        if result.get("revoked"):
            st.write("Revoked:", result["revoked"])
    else:
        step = result.get("step")
        st.error(f"Failed{f' at {step} step' if step else ''}: {result.get('error')}")
        if result.get("mintAddress"):
            st.warning(f"Token {result['mintAddress']} was created but its authorities were not revoked.")
        if result.get("details"):
            st.code(result["details"])
    with st.expander("Raw response"):
        st.json(result)


#############################
# Create token
#############################
st.header("1) Create token")
metadata_url = st.text_input("Metadata URL", placeholder="https://example.com/metadata.json")
preset_names = list(PRESETS) + ["CUSTOM"]
preset = st.selectbox(
    "Authorities after creation",
    options=preset_names,
    format_func=lambda p: f"{p} - {PRESETS[p]['description']}" if p in PRESETS else "Choose flags below",
)
if preset == "CUSTOM":
    revoke_mint = st.checkbox("Revoke mint authority", value=True)
    revoke_freeze = st.checkbox("Revoke freeze authority", value=True)
else:
    revoke_mint = PRESETS[preset]["revoke_mint_authority"]
    revoke_freeze = PRESETS[preset]["revoke_freeze_authority"]

if st.button("Create token"):
    if not is_valid_metadata_url(metadata_url):
        st.warning("Enter an http:// or https:// metadata URL.")
    else:
        with st.spinner("Creating token..."):
            if revoke_mint or revoke_freeze:
                result = client.create_and_revoke(
                    metadata_url,
                    revoke_mint_authority=revoke_mint,
                    revoke_freeze_authority=revoke_freeze,
                    wait_seconds=WAIT_SECONDS,
                )
            else:
                result = client.create_token(metadata_url)
        if result.get("mintAddress"):
            st.session_state["last_mint"] = result["mintAddress"]
        show_result(result)

#############################
# Revoke authorities
#############################
st.header("2) Revoke authorities of an existing token")
mint_address = st.text_input("Mint address", value=st.session_state.get("last_mint", ""))
col1, col2 = st.columns(2)
with col1:
    manual_mint = st.checkbox("Mint authority", value=True, key="manual_mint")
with col2:
    manual_freeze = st.checkbox("Freeze authority", value=True, key="manual_freeze")

if st.button("Revoke"):
    if not mint_address.strip():
        st.warning("Enter a mint address.")
    else:
        with st.spinner(f"Revoking authorities for {format_mint_address(mint_address)}..."):
            result = client.revoke_authorities(mint_address.strip(), manual_mint, manual_freeze)
        show_result(result)
        if result.get("message"):
            st.info(result["message"])

#############################
# Batch
#############################
st.header("3) Batch create")
st.caption('JSON list of {"name", "metadataUrl", "revokeMintAuthority", "revokeFreezeAuthority"}')
batch_text = st.text_area("Token configs", height=160, value="[]")
batch_delay = st.number_input("Delay between tokens (seconds)", min_value=0.0, value=2.0, step=0.5)

if st.button("Run batch"):
    try:
        configs = json.loads(batch_text)
    except json.JSONDecodeError as e:
        st.error(f"Invalid JSON: {e}")
        configs = None
    if isinstance(configs, list) and configs:
        missing = [i for i, c in enumerate(configs) if not isinstance(c, dict) or not c.get("metadataUrl")]
        if missing:
            st.error(f"Configs missing metadataUrl at positions: {missing}")
        else:
            with st.spinner(f"Creating {len(configs)} tokens..."):
                outcome = client.batch_create(configs, delay_seconds=batch_delay, wait_seconds=WAIT_SECONDS)
            summary = outcome["summary"]
            st.write(f"{summary['successful']}/{summary['total']} successful, {summary['failed']} failed")
            for item in outcome["results"]:
                name = item["config"].get("name") or f"Token {item['index'] + 1}"
                res = item["result"]
                if res["success"]:
                    st.write(f"- **{name}**: `{res['mintAddress']}`")
                else:
                    st.write(f"- **{name}**: failed ({res.get('step')}) {res.get('error')}")
    elif configs is not None:
        st.warning("Provide a non-empty JSON list.")

st.write("---")
st.caption("The API holds the wallet. Point TOKEN_API_URL at a running token-mint-api server.")
