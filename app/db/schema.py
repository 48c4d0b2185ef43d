from __future__ import annotations


def ensure_schema(conn) -> None:
    cur = conn.cursor()
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS users (
            id bigserial PRIMARY KEY,
            name text NOT NULL,
            phone text,
            email text NOT NULL UNIQUE,
            password_hash text NOT NULL,
            role text NOT NULL DEFAULT 'player' CHECK (role IN ('player', 'admin')),
            created_at timestamptz NOT NULL DEFAULT now()
        );
        """
    )
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS ticket_batches (
            id bigserial PRIMARY KEY,
            owner_id bigint NOT NULL REFERENCES users(id),
            numbers text NOT NULL,
            total_amount numeric(10,2) NOT NULL CHECK (total_amount >= 0),
            status text NOT NULL DEFAULT 'Owed' CHECK (status IN ('Owed', 'Cancelled')),
            payment_proof_ref text,
            created_at timestamptz NOT NULL DEFAULT now(),
            updated_at timestamptz NOT NULL DEFAULT now()
        );
        """
    )
    cur.execute(
        "ALTER TABLE ticket_batches ADD COLUMN IF NOT EXISTS payment_proof_ref text;"
    )
    cur.execute(
        "CREATE INDEX IF NOT EXISTS ticket_batches_owner_id_idx ON ticket_batches (owner_id);"
    )
    conn.commit()
    cur.close()
