import time

import jax
import jax.numpy as jnp

from chipax import create_state, load_program, run_n_cycles, display_to_text

# Fill the screen with random glyphs: Vx = rand, Vy = rand, I = glyph(V2), draw, loop
PROGRAM = bytes([
    0xC0, 0x3F,  # V0 = rand & 0x3F
    0xC1, 0x1F,  # V1 = rand & 0x1F
    0xC2, 0x0F,  # V2 = rand & 0x0F
    0xF2, 0x29,  # I = glyph(V2)
    0xD0, 0x15,  # draw 5 rows at (V0, V1)
    0x12, 0x00,  # jump 0x200
])


if __name__ == "__main__":
    num_machines = 512
    num_cycles = 6000

    base = load_program(create_state(), PROGRAM)
    rngs = jax.random.split(jax.random.PRNGKey(0), num_machines)
    states = jax.vmap(lambda rng: base.replace(rng=rng))(rngs)

    run_batch = jax.jit(jax.vmap(lambda state: run_n_cycles(state, num_cycles)))

    start = time.perf_counter()
    jax.block_until_ready(run_batch(states))
    print(f"Compilation + first run: {time.perf_counter() - start:.2f}s")

    start = time.perf_counter()
    final = jax.block_until_ready(run_batch(states))
    elapsed = time.perf_counter() - start
    print(f"{num_machines * num_cycles / elapsed:,.0f} instructions/s over {num_machines} machines")

    lit = jnp.sum(final.display, axis=(1, 2))
    print(f"Lit pixels: min={int(lit.min())} max={int(lit.max())}")
    print(display_to_text(final.display[0]))
