from brain_stream import AssistantClient, BrainAPIError, BrainStreamError

try:
    with AssistantClient(base_url="http://localhost:3000") as client:
        turn = client.complete([{"role": "user", "content": "Hello"}])
        print(turn.content)
except BrainAPIError as e:
    if e.is_auth_error:
        print("Check your BRAIN_API_KEY.")
    elif e.is_validation_error:
        print(f"Bad request: {e.message}")
    elif e.is_server_error:
        print(f"Server error {e.status_code} – consider retrying.")
    else:
        print(e.to_dict())
except BrainStreamError as e:
    print(f"Stream aborted: {e}")
