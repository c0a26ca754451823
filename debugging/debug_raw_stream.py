import logging
import threading

import dotenv

from brain_stream import AssistantClient, CancelToken
from brain_stream.events import event_to_dict

##################################################################
logging.basicConfig(
    level=logging.DEBUG,
    format="%(levelname)s [%(asctime)s] %(name)s - %(message)s",
)

# httpcore es el motor interno de httpx
logging.getLogger("httpcore").setLevel(logging.DEBUG)
logging.getLogger("httpx").setLevel(logging.DEBUG)
##################################################################

dotenv.load_dotenv()

token = CancelToken()
# Corta el stream a los 30 segundos para no dejar la consola colgada.
timer = threading.Timer(30.0, token.cancel)
timer.start()

with AssistantClient() as client:
    seen = []

    def on_event(event):
        print("i=", len(seen), "type=", event.type)
        print("dict=", event_to_dict(event))
        seen.append(event)

    try:
        client.run([{"role": "user", "content": "Di: hola"}], on_event, cancel_token=token)
    finally:
        timer.cancel()

print("events:", len(seen), "cancelled:", token.cancelled)
